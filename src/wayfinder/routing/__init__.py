"""Routing: URI patterns, routes and the router tree."""
