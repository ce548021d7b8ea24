"""Workshop Attendance package.

Organized by feature modules (users, days, sessions, attendance, submissions,
progress) with a thin Flask JSON controller layer over service/repository
layers. Session attendance windows are the core state machine; see
`sessions.window` and `sessions.closer`.
"""
