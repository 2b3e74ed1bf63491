"""
LED matrix output for rendered boxes.
Paints lit box cells onto an rpi-rgb-led-matrix panel.
"""

from rgbmatrix import RGBMatrix, RGBMatrixOptions

from utils import load_config, parse_color, scale_color


def create_matrix(config: dict = None) -> RGBMatrix:
    """
    Initialize and return an RGBMatrix instance.
    """
    if config is None:
        config = load_config()

    matrix_config = config.get("matrix", {})

    options = RGBMatrixOptions()
    options.rows = matrix_config.get("rows", 32)
    options.cols = matrix_config.get("cols", 64)
    options.chain_length = matrix_config.get("chain_length", 1)
    options.parallel = matrix_config.get("parallel", 1)
    options.hardware_mapping = matrix_config.get("hardware_mapping", "adafruit-hat")
    options.disable_hardware_pulsing = True
    options.brightness = matrix_config.get("brightness", 50)
    options.gpio_slowdown = matrix_config.get("gpio_slowdown", 4)
    options.pwm_bits = matrix_config.get("pwm_bits", 11)
    options.pwm_lsb_nanoseconds = matrix_config.get("pwm_lsb_nanoseconds", 130)
    options.show_refresh_rate = matrix_config.get("show_refresh_rate", False)

    # Valid values: "RGB", "RBG", "GRB", "GBR", "BRG", "BGR"
    options.led_rgb_sequence = matrix_config.get("rgb_sequence", "RBG")

    return RGBMatrix(options=options)


class LedOutput:
    """Shows box frames on the LED matrix."""

    def __init__(self, matrix: RGBMatrix = None, config: dict = None):
        """
        Initialize the LedOutput.

        Args:
            matrix: Optional RGBMatrix instance. Creates one if not provided.
            config: Optional config dict. Loads from file if not provided.
        """
        self.config = config or load_config()
        self.matrix = matrix or create_matrix(self.config)
        self.canvas = self.matrix.CreateFrameCanvas()

        scroller_config = self.config.get("text_scroller", {})
        self.background_color = parse_color(scroller_config.get("background_color", "#000000"))
        self.color = scale_color(
            parse_color(scroller_config.get("color", "#FFFFFF")),
            scroller_config.get("brightness", 100),
        )

    def show(self, box):
        """Paint the box into the back canvas and swap it in."""
        self.canvas.Fill(*self.background_color)
        r, g, b = self.color
        width = min(box.width, self.canvas.width)
        height = min(box.height, self.canvas.height)
        for y in range(height):
            row = box.rows[y]
            for x in range(width):
                value = row[x]
                if value:
                    # Grayscale cells dim the text color
                    level = min(value, 255) / 255 if value > 1 else 1
                    self.canvas.SetPixel(x, y, int(r * level), int(g * level), int(b * level))
        self.canvas = self.matrix.SwapOnVSync(self.canvas)

    def clear(self):
        """Clear the display."""
        self.canvas.Clear()
        self.canvas = self.matrix.SwapOnVSync(self.canvas)
