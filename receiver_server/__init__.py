"""
Receiver Server module.

HTTP webhook transport: validates GitHub push events and hands them to the
job coordinator.
"""
