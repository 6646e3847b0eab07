"""MOVIE MATCH game core: state, rules, round engine and session."""
