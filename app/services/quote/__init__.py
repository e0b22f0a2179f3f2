"""
Quote submission core.

Row codec, session resolver, merge engine, notifications and the
orchestrator that ties them together for the two-part quote form.
"""
