"""Lead Relay - mailbox lead intake pipeline.

Polls a mailbox for lead notification emails, extracts the lead's contact
details, assigns an agent round-robin and replies to the lead exactly once.
"""

__version__ = "0.1.0"
