"""Okta group membership sync.

Lists groups from the Okta API, flattens the members of the configured
target groups into (email, group) records, and optionally writes the
result as a JSON object to S3-compatible blob storage.
"""
