"""
Receiver Client module.

Command-line client for sending test events to a running receiver and
inspecting its jobs.
"""
