# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for ScholarSync.

Each domain module provides services that act on the data backend and
announce their changes on the real-time event channel.

Domains:
    academic: Articles, reports and supervisor comments.
    auth: Login, credential tokens and token verification.
"""
