"""v1 router package: all /api/v1/* endpoints live here.

Files:
  accounts.py     registration, payout profile, deactivation, earnings, balance
  submissions.py  document submissions and the review commands
  payouts.py      payout requests, decisions and payment recording
  views.py        named queue screens (review-queue, payments, ...)

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
