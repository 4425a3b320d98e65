"""Deployment helpers for a Docker Compose based Airflow stack."""

__version__ = "0.1.0"
