"""Hyperparameters, propagation kernels, the training loop and pipelines."""
