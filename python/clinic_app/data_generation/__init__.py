"""
Demo data generation for the Wellness+ Clinic Dashboard.
"""
