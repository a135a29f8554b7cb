"""
Business logic for the Visnet E-Learning API.

Routers stay thin; each service module owns the queries and
transactions of one component.
"""
