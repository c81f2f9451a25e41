"""Restricted Boltzmann machine trained with k-step contrastive divergence."""
