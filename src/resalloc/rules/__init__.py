"""Typed predicates and the validation rule catalog."""
