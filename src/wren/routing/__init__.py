"""Routing — compiled route tree with nested, first-match path matching.

Route records are compiled once into a forest of ``Route`` nodes when the
router is created. Each match produces a fresh ``MatchResult`` holding a
chain of ``MatchedRoute`` nodes, one per nesting level.
"""
