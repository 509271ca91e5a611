"""Interactive drawing canvas that classifies hand-drawn digits."""

from __future__ import annotations

import math

import numpy as np

from nanonn.config import IMAGE_HEIGHT, IMAGE_WIDTH
from nanonn.network import NeuralNetwork

BRUSH_RADIUS = 1
MAX_INTENSITY = 1.0
TIME_BETWEEN_PREDICTIONS = 0.1
STROKE_STRENGTH = 0.3
CELL_SIZE = 10


def rank_predictions(probs) -> list[tuple[int, float]]:
    """Pair each digit with its probability, most likely first."""
    ranked = [(digit, float(prob)) for digit, prob in enumerate(probs)]
    if any(math.isnan(prob) for _, prob in ranked):
        raise ValueError("cannot rank NaN probabilities")
    return sorted(ranked, key=lambda item: item[1], reverse=True)


class DigitCanvas:
    """A 28x28 grid of intensities in [0, 1] painted with a soft brush."""

    def __init__(self, width: int = IMAGE_WIDTH, height: int = IMAGE_HEIGHT) -> None:
        self.grid = np.zeros((height, width), dtype=float)

    def paint(self, x: int, y: int) -> None:
        """Apply one brush stroke centred on cell (x, y)."""
        height, width = self.grid.shape
        radius_sq = float(BRUSH_RADIUS * BRUSH_RADIUS)
        for dy in range(-BRUSH_RADIUS, BRUSH_RADIUS + 1):
            for dx in range(-BRUSH_RADIUS, BRUSH_RADIUS + 1):
                nx, ny = x + dx, y + dy
                if not (0 <= nx < width and 0 <= ny < height):
                    continue
                distance = math.hypot(dx, dy)
                if distance <= BRUSH_RADIUS:
                    intensity = MAX_INTENSITY * math.exp(-distance * distance / radius_sq)
                else:
                    intensity = 0.0
                self.grid[ny, nx] = min(self.grid[ny, nx] + intensity * STROKE_STRENGTH, 1.0)

    def clear(self) -> None:
        """Reset every cell to zero."""
        self.grid.fill(0.0)

    def pixels(self) -> np.ndarray:
        """The grid flattened row by row."""
        return self.grid.flatten()


class DigitApp:
    """Window in which the user draws a digit and sees live predictions."""

    def __init__(self, nn: NeuralNetwork) -> None:
        self.nn = nn
        self.canvas = DigitCanvas()
        self.prediction: np.ndarray | None = None

    def _predict(self) -> None:
        self.prediction = self.nn.forward(self.canvas.pixels())

    def _summary_lines(self) -> list[str]:
        if self.prediction is None:
            return []
        ranked = rank_predictions(self.prediction)
        best_digit, best_prob = ranked[0]
        lines = [f"The digit is probably {best_digit} with {best_prob * 100:.2f}% confidence."]
        lines.extend(f"Digit {digit}: {prob * 100:.2f}%" for digit, prob in ranked)
        return lines

    def run(self) -> None:
        """Open the window and block until it is closed."""
        import tkinter as tk

        height, width = self.canvas.grid.shape
        root = tk.Tk()
        root.title("nano-nn")
        tk.Label(root, text="Draw a digit with your mouse:").pack()

        board = tk.Canvas(
            root,
            width=width * CELL_SIZE,
            height=height * CELL_SIZE,
            bg="black",
            highlightthickness=0,
        )
        board.pack()
        cells = [
            [
                board.create_rectangle(
                    x * CELL_SIZE,
                    y * CELL_SIZE,
                    (x + 1) * CELL_SIZE,
                    (y + 1) * CELL_SIZE,
                    fill="#000000",
                    width=0,
                )
                for x in range(width)
            ]
            for y in range(height)
        ]
        result = tk.StringVar()

        def redraw() -> None:
            for (y, x), value in np.ndenumerate(self.canvas.grid):
                level = int(value * 255)
                board.itemconfigure(cells[y][x], fill=f"#{level:02x}{level:02x}{level:02x}")

        def show() -> None:
            result.set("\n".join(self._summary_lines()))

        def on_drag(event) -> None:
            self.canvas.paint(event.x // CELL_SIZE, event.y // CELL_SIZE)
            redraw()

        def clear() -> None:
            self.canvas.clear()
            self.prediction = None
            redraw()
            show()

        def tick() -> None:
            self._predict()
            show()
            root.after(int(TIME_BETWEEN_PREDICTIONS * 1000), tick)

        board.bind("<B1-Motion>", on_drag)
        board.bind("<Button-1>", on_drag)
        tk.Button(root, text="Clear", command=clear).pack()
        tk.Label(root, textvariable=result, justify="left").pack()

        root.after(int(TIME_BETWEEN_PREDICTIONS * 1000), tick)
        root.mainloop()