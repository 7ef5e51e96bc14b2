"""
Job Collector

Periodically scrapes a job search results page, deduplicates listings against
stored records, enriches new ones and writes them to the configured sink.
"""

__version__ = "1.0.0"
