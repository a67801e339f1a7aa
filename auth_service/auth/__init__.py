"""
Authentication microservice.

This module provides authentication and authorization services:
- User registration and login
- JWT token handling
- Role-based access checks
"""
