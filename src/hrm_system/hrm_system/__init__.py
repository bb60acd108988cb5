"""HRM System package.

Leave and attendance domain organized by feature modules (policies, balances,
leave, approvals, attendance, summaries, ...) with a thin Flask controller layer
on top of service/repository layers.
"""
