"""
Waitlist package.

Responsibilities:
- Accept early-access signups and assign stable FIFO queue positions.
- Report queue statistics and the next entries to invite.
- Move entries through the waiting/invited/registered/declined lifecycle.
"""
