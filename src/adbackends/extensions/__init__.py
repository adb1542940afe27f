"""Optional plugins refining mode resolution for specific backends.

Importing a plugin module registers its resolvers, e.g.::

    import adbackends.extensions.jax
"""
