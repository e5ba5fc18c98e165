"""
Module: hr_modules
Responsibility:
    Thin service layer between the record store and the pure engines:
    payroll runs (preview, finalize, revert), staff financials (advance
    eligibility, live pay estimate) and attendance services (dashboard
    summary, bonus calculator, missing-checkout maintenance).

Architecture position:
    Modules -- may import hr_kernel and hr_engines.  Engines never import
    this package.

Invariants enforced:
    - Each write operation owns its transaction boundary
      (``commit`` on success, ``rollback`` and re-raise on failure).
    - "Today" is derived once per operation from the injected Clock via
      BusinessCalendar and handed to the engines.
    - Optional inputs are fetched with per-input failure isolation
      (see ``hr_modules._loading``).
"""
