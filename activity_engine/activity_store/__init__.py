"""Persistence adapters for activity records.

Every backend implements the ActivityStore protocol from `api` and raises only
the domain errors from `activity_engine.errors`.
"""
