"""Persistence for learner progress: connection pool, schema, queries and stores"""
