"""Layout Conformance Tester"""
