"""
Test Suite

Unit tests for the job collector: scrapers, enrichment, the collection
cycle, sinks and the HTTP API.
"""
