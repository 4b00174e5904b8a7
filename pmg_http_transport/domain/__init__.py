"""
Domain package.

Pure message-bus concepts: routing keys and topics, the listener registry,
the error taxonomy and the transport port. No framework imports.
"""
