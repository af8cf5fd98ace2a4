"""
mybank/api/dependencies.py

Purpose: Request access to process-scoped context objects

The app factory stores the settings, metrics registry, session manager and
repository on app.state; routes receive them through these dependencies so
tests can swap in fakes.
"""

from fastapi import Request

from mybank.core.config import Settings
from mybank.core.metrics import MetricsRegistry
from mybank.db.mongo import MongoSessionManager
from mybank.repositories.user_repository import UserRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> MetricsRegistry:
    return request.app.state.metrics


def get_session_manager(request: Request) -> MongoSessionManager:
    return request.app.state.sessions


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users
