"""
Service layer abstraction.

``lifecycle`` holds the pure notice/application rules; the service
classes around it load records from the key‑value store, apply those
rules and write the result back.  API handlers only talk to the
service classes.
"""
