"""Share and record validation.

One rule table (``rules``) and one set of pure checks (``shares``) consumed
by both the data-entry wizards and the record gateway.
"""
