"""ScholarSync client.

Real-time collaboration layer for supervisors and doctoral students:
session state, the event channel to the messaging backend, inbound event
routing with presence tracking, and outbound domain event publishing.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
