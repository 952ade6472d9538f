# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later
__all__ = [
    "config", "context", "errors", "schemas", "metrics", "service", "main", "cli",
    "stores", "log",
]
