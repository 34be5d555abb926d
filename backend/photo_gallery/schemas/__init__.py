"""Pydantic schemas for the photo gallery API."""
