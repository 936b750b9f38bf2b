"""
dqn.py - Deep Q-Network value approximator for Connect Four

The agent treats the network as a black box with three capabilities:
predicting action values for a batch of boards, being trained by an
optimizer on the online copy, and copying weights into the target copy.
"""

import os
from typing import Optional

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F

from connect4ai.debug import debug
from connect4ai.utils import ROWS, COLS
from connect4ai.ai.utils import states_to_tensor


class DQNModel(nn.Module):
    """
    Convolutional network mapping boards to one Q-value per column.

    Input shape is (batch, ROWS, COLS, 1); output shape is (batch, COLS).
    """

    def __init__(self, filters1: int = 8, filters2: int = 16, hidden_size: int = 64):
        """
        Initialize the network.

        Args:
            filters1: Channels of the 4x4 convolution (one per win-window shape)
            filters2: Channels of the 2x2 convolution
            hidden_size: Units of the fully connected hidden layer
        """
        super(DQNModel, self).__init__()

        debug.debug(f"Initializing DQNModel ({filters1}, {filters2}, {hidden_size})", "ai")
        self.filters1 = filters1
        self.filters2 = filters2
        self.hidden_size = hidden_size

        self.conv1 = nn.Conv2d(1, filters1, kernel_size=4)
        self.conv2 = nn.Conv2d(filters1, filters2, kernel_size=2)

        # Valid convolutions: 6x7 -> 3x4 -> 2x3
        conv_output_size = filters2 * (ROWS - 4) * (COLS - 4)

        self.fc1 = nn.Linear(conv_output_size, hidden_size)
        self.fc2 = nn.Linear(hidden_size, COLS)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Forward pass.

        Args:
            x: Tensor of shape (batch, ROWS, COLS, 1)

        Returns:
            Tensor of shape (batch, COLS)
        """
        # Channels-last boards to PyTorch's channels-first layout
        x = x.permute(0, 3, 1, 2)
        x = F.relu(self.conv1(x))
        x = F.relu(self.conv2(x))
        x = x.reshape(x.size(0), -1)
        x = F.relu(self.fc1(x))
        return self.fc2(x)

    def predict(self, states) -> np.ndarray:
        """
        Action values for one or many grids, computed without gradients.

        Returns:
            Array of shape (batch, COLS)
        """
        with torch.no_grad():
            return self(states_to_tensor(states)).numpy()

    def copy_weights_from(self, other: 'DQNModel') -> None:
        """Overwrite this network's weights with a copy of ``other``'s."""
        self.load_state_dict(other.state_dict())

    def config(self) -> dict:
        return {'filters1': self.filters1, 'filters2': self.filters2,
                'hidden_size': self.hidden_size}

    def save(self, path: str) -> None:
        """
        Save the weights and layer sizes to ``path``.

        Args:
            path: File to write (parent directories are created)
        """
        debug.info(f"Saving model to {path}", "ai")
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        torch.save({'config': self.config(), 'state_dict': self.state_dict()}, path)

    @classmethod
    def load(cls, path: str, map_location: Optional[str] = 'cpu') -> 'DQNModel':
        """
        Load a model written by ``save``.

        Args:
            path: Saved model file

        Returns:
            DQNModel in evaluation mode
        """
        debug.info(f"Loading model from {path}", "ai")
        checkpoint = torch.load(path, map_location=map_location)
        model = cls(**checkpoint['config'])
        model.load_state_dict(checkpoint['state_dict'])
        model.eval()
        return model
