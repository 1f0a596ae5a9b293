"""Tracking state.

Policy helpers and the tracked mission set: the single place that decides
which missions of a snapshot are followed on the map.
"""
