"""Rate model, neuron state, parameters and synthetic stimuli."""
