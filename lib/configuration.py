"""Training configuration."""
from dataclasses import dataclass, asdict
import json
from typing import Optional
import h5py
from rbm_cd.contrastive_divergence import validate_chain_length
from rbm_cd.errors import InvalidArgument


@dataclass
class Configuration:
    """RBM training configuration."""
    n_visible: int
    n_hidden: int
    learning_rate: float
    k: int = 1
    momentum: float = 1.
    l2: float = 0.
    use_regularization: bool = False
    seed: Optional[int] = None
    tolerance: float = 1.e-4
    max_iterations: int = 1000
    patience: int = 1
    batch_size: Optional[int] = None

    def __post_init__(self):
        if self.n_visible < 1 or self.n_hidden < 1:
            raise InvalidArgument('Layer sizes must be positive')
        if self.learning_rate <= 0.:
            raise InvalidArgument(f'learning_rate must be positive, got {self.learning_rate}')
        validate_chain_length(self.k)
        if self.l2 < 0.:
            raise InvalidArgument(f'l2 must be non-negative, got {self.l2}')

    @classmethod
    def from_dict(cls, conf_dict):
        return cls(**conf_dict)

    def optimizer_options(self) -> dict:
        return {'tolerance': self.tolerance, 'max_iterations': self.max_iterations,
                'patience': self.patience, 'batch_size': self.batch_size}

    def save(self, fd: h5py.File):
        gr = fd.create_group('configuration')
        gr.create_dataset('n_visible', data=self.n_visible)
        gr.create_dataset('n_hidden', data=self.n_hidden)
        gr.create_dataset('learning_rate', data=self.learning_rate)
        gr.create_dataset('k', data=self.k)
        gr.create_dataset('momentum', data=self.momentum)
        gr.create_dataset('l2', data=self.l2)
        gr.create_dataset('use_regularization', data=self.use_regularization)
        gr.attrs['json'] = json.dumps(asdict(self))
