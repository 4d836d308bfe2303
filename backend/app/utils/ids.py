"""Opaque identifier generation"""
import uuid


def new_id() -> str:
    """Generate a new opaque primary key (32 lowercase hex chars)"""
    return uuid.uuid4().hex
