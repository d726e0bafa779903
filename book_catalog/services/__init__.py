"""Services Layer — persistence operations behind the HTTP routes.

Invariants:
    - Every statement binds user input as parameters (no string-built SQL)
"""
