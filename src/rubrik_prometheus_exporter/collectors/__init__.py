"""Collectors package for Rubrik metrics.

Contains collector implementations for different Rubrik resource types.
Each collector module provides fetch and generate_metrics functions that
can be composed with the RubrikCollector class.
"""
