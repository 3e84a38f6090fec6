"""Pydantic schemas package.

Folder intent:
  common.py      CamelModel base + HealthResponse (all schemas inherit CamelModel)
  account.py     account, payout profile, earnings and balance DTOs
  submission.py  submission and review command DTOs
  payout.py      payout request and decision DTOs
  audit.py       audit history entries
  query.py       filter / sort / page inputs for the query engine
"""
