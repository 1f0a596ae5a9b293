"""Map overlay layer.

The map surface contract, marker variant selection and the reconciler
that owns every rendered map object.
"""
