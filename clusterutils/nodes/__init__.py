"""Nodes package: worker executor, namespaces, and the worker HTTP node"""
