# File: src/triunity/api/deps.py
from fastapi import Request

from ..config.service_config import ServiceConfig
from ..monitoring.metrics import MetricsCollector
from ..telemetry.clock import Clock, RandomSource
from ..telemetry.profiles import Profile


def get_config(request: Request) -> ServiceConfig:
    return request.app.state.config


def get_profile(request: Request) -> Profile:
    return request.app.state.profile


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_rng(request: Request) -> RandomSource:
    return request.app.state.rng


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics
