"""Namespace reserved for the scavenge puzzle module; it holds no modules yet."""