"""Setup (provisioning) services.

This package contains orchestration helpers that *provision* or *verify* the
external storage resources this tool manages (e.g., blob containers).
"""
