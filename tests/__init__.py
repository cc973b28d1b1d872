"""
Test suite for the Clinic Queue Service.

Covers queue number allocation, queue position estimates and the HTTP API.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
