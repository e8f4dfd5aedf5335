"""
Package marker for the pkgview presentation layer.
View-model shaping lives under `pkgview.api`; process-wide settings and logging live under `pkgview.common`.
"""
