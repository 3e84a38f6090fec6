"""Services package: all business logic lives here, never in routers.

Files:
  authorization.py  permission table and transition guard every command consults
  accounts.py       registration, payout profile, deactivation, earnings feed
  review.py         submission review state machine
  payouts.py        payout state machine and balance checks
  query.py          filtered, sorted, snapshot-paginated listings and views
  snapshots.py      in-process store of frozen list results
  audit.py          stages one AuditEntry per applied transition

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
