"""
Invalidator Service package.

Receives a FULLBAN trigger, resolves the healthy members of an Auto Scaling
group and asks the cache daemon on each member to drop its whole cache.
"""
