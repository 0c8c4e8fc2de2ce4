"""Cointrunk: curated news feed with publishers, accepted domains and paid articles."""