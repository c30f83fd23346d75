"""
MLOps Module
============

Evaluation runner and experiment tracking.

``mlops.tracking`` needs the optional ``tracking`` extra (MLflow) and is only
imported when tracking is requested.
"""
