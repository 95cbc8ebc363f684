"""
Visualization Tools for CodeFight

Draws the arena as a square grid colored by the program that last wrote
each cell, and optionally marks every alive program's pointer.
"""

from typing import List, Optional

import numpy as np
import matplotlib
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import ListedColormap

from codefight.arena import ProgramIdentity
from codefight.game import GameSystem

UNOWNED = -1


class ArenaVisualizer:
    """
    Visualizes the ownership state of a CodeFight arena.
    """

    def __init__(self, arena_size: int):
        """
        Initialize the visualizer.

        Args:
            arena_size: Number of cells in the arena
        """
        self.arena_size = arena_size
        self.grid_size = int(np.ceil(np.sqrt(arena_size)))

    def ownership_indices(self, game: GameSystem) -> List[int]:
        """Index of each cell's last writer in the placed roster, or -1."""
        roster = [p.identity for p in game.placed_programs()]
        indices = []
        for owner in game.arena.ownership():
            indices.append(roster.index(owner) if owner in roster else UNOWNED)
        return indices

    def _ownership_to_image(self, ownership: List[int]) -> np.ndarray:
        """Convert ownership array to image."""
        # Pad to square
        padded = ownership + [UNOWNED] * (self.grid_size**2 - len(ownership))
        img = np.array(padded).reshape(self.grid_size, self.grid_size)
        return img

    def _grid_position(self, address: int):
        row, col = divmod(address, self.grid_size)
        return col, row

    def plot_ownership(
        self,
        game: GameSystem,
        title: Optional[str] = None,
        save_path: Optional[str] = None,
    ):
        """
        Plot which program last wrote each cell.

        Args:
            game: Game whose current arena is drawn
            title: Plot title (defaults to the alive count)
            save_path: Optional path to save the figure instead of showing it

        Returns:
            The ownership image that was drawn
        """
        programs = game.placed_programs()
        img = self._ownership_to_image(self.ownership_indices(game))

        fig, ax = plt.subplots(figsize=(8, 8))

        # Custom colormap: unowned=dark, one color per placed program
        cmap = matplotlib.colormaps['tab10']
        colors = ['#1a1a2e']
        for i in range(len(programs)):
            colors.append(cmap(i % cmap.N))
        custom_cmap = ListedColormap(colors)

        ax.imshow(img + 1, cmap=custom_cmap, vmin=0, vmax=max(len(programs), 1))

        # Mark pointers of alive programs
        for program in game.alive_programs():
            x, y = self._grid_position(program.pointer)
            ax.text(x, y, program.symbol or "*", ha='center', va='center', color='white', fontsize=10)

        patches = [mpatches.Patch(color=colors[0], label='Unowned')]
        for i, program in enumerate(programs):
            state = "alive" if program.alive else "stopped"
            patches.append(mpatches.Patch(color=colors[i + 1], label=f"{program.label} ({state})"))
        ax.legend(handles=patches, loc='upper right')

        if title is None:
            title = f"Arena of {self.arena_size} cells, {len(game.alive_programs())} alive"
        ax.set_title(title, fontsize=14)
        ax.axis('off')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150)
            print(f"Saved to {save_path}")
        else:
            plt.show()

        plt.close(fig)
        return img


def owner_counts(game: GameSystem) -> dict:
    """Number of cells last written by each placed program."""
    counts = {p.label: 0 for p in game.placed_programs()}
    for owner in game.arena.ownership():
        if isinstance(owner, ProgramIdentity) and owner.label in counts:
            counts[owner.label] += 1
    return counts
