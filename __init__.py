"""
oobforest

A small Random Forest classifier: bootstrap resampling, Gini tree induction
over per-tree feature subsets, majority-vote prediction with per-tree vote
breakdowns, out-of-bag error curves, and MDI and permutation feature
importance.

Modules live at the repository root; the tree and forest containers are in
the data_structures package.
"""
