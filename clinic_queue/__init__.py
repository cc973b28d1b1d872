"""
Clinic Queue Service

A FastAPI-based appointment booking service for clinics and hospitals that
assigns collision-free queue numbers to bookings and walk-ins and estimates
each patient's wait.
"""

__version__ = "1.0.0"
