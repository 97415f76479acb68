"""
Local PostgreSQL bootstrap.

Brings a local PostgreSQL instance to a known state:
- locate the installed server binaries
- make sure a server is running on the configured port
- create the application database and login role
- apply the baseline schema and seed rows
"""
