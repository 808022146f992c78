"""Source-hosting integrations.

These modules talk to the hosting platform (tag listings, branch status,
merges) and resolve which credentials to use for which host.
"""
