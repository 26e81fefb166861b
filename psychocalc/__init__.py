"""Psychometric calculator suite: Aiken's V, Cronbach's alpha, baremos,
survey aggregation and Likert recoding."""

__version__ = "1.0.0"
