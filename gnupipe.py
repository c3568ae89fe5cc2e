#!/usr/bin/env python3

"""
gnupipe.py

driver module for piping commands and inline data to gnuplot
v0.5

Data is sent inline ('-' special file), so nothing touches the disk
except exported images. Surface and colormap blocks break rows on blank
lines; the series has to arrive grouped by x (surface) or y (colormap),
because grouping uses exact float equality.

A Graph owns its pipe and is meant for one thread at a time.

GNU PUBLIC LICENSE DISCLAIMER:
This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.
"""

import sys
import enum
import math
import shlex
import subprocess
from collections import namedtuple
from warnings import warn
import numpy as np

class InvalidArgument(ValueError):
    "Raised for out-of-range plot parameters."
    pass

Point2D = namedtuple("Point2D", ["x", "y"])
Point3D = namedtuple("Point3D", ["x", "y", "z"])

@enum.unique
class PlotStyle(enum.Enum):
    "Data styles; each value is the token gnuplot expects after 'with'."
    LINES = "lines"
    POINTS = "points"
    LINES_POINTS = "linespoints"
    IMPULSES = "impulses"
    DOTS = "dots"
    STEPS = "steps"
    FSTEPS = "fsteps"
    HISTEPS = "histeps"
    BOXES = "boxes"
    FILLED_CURVES_X1 = "filledcurves x1"
    FILLED_CURVES_Y1 = "filledcurves y1"
    FILLED_CURVES_CLOSED = "filledcurves closed"

def style_name(style):
    "Return gnuplot token for a PlotStyle, its member name or its token."
    if isinstance(style, PlotStyle):
        return style.value
    if isinstance(style, str):
        key = style.strip()
        if key.upper() in PlotStyle.__members__:
            return PlotStyle[key.upper()].value
        try:
            return PlotStyle(key).value
        except ValueError:
            pass
    raise InvalidArgument("Unknown plot style: {!r}".format(style))

class Display:
    "Render target: the interactive terminal."
    def __repr__(self):
        return "Display()"

class FileExport:
    "Render target: image file of width x height pixels."
    def __init__(self, path, width, height):
        if not path:
            raise InvalidArgument("Export path must not be empty")
        for name, val in (("width", width), ("height", height)):
            try:
                ok = not isinstance(val, bool) and int(val) == val and val > 0
            except (TypeError, ValueError, OverflowError):
                ok = False
            if not ok:
                raise InvalidArgument("Export {} must be a positive integer, got {!r}".format(name, val))
        self.path = str(path)
        self.width = int(width)
        self.height = int(height)
    def __repr__(self):
        return "FileExport({!r}, {}, {})".format(self.path, self.width, self.height)

## data block formatting
## each returns the text between the plot header and the 'e' terminator

def fmt_row(point):
    "One whitespace-separated data line; repr of float round-trips exactly."
    return " ".join(repr(float(val)) for val in point) + "\n"

def format_2d(series):
    "Flat x-y block, one line per point."
    return "".join(fmt_row(point[:2]) for point in series)

def format_surface(series):
    """
    x-y-z block with a blank line wherever x changes between neighbours.
    Points sharing an x must be contiguous.
    """
    points = list(series)
    lines = []
    for here, there in zip(points, points[1:] + [None]):
        lines.append(fmt_row(here[:3]))
        # no lookahead past the last point
        if there is not None and there[0] != here[0]:
            lines.append("\n")
    return "".join(lines)

def format_colormap(series):
    """
    x-y-z block with a blank line before each point whose y differs from
    the one before it. Points sharing a y must be contiguous.
    """
    points = list(series)
    if not points: return ""
    lines = []
    y_prev = points[0][1]
    for point in points:
        if point[1] != y_prev:
            lines.append("\n")
        lines.append(fmt_row(point[:3]))
        y_prev = point[1]
    return "".join(lines)

def surface_grid(xs, ys, func):
    "Evaluate func(x, y) on the grid xs * ys, grouped by x for format_surface."
    xx, yy = np.meshgrid(np.asarray(xs, dtype=float), np.asarray(ys, dtype=float), indexing='ij')
    zz = np.vectorize(func, otypes=[float])(xx, yy)
    return [Point3D(*row) for row in zip(xx.ravel().tolist(), yy.ravel().tolist(), zz.ravel().tolist())]

def check_range(axis, minimum, maximum):
    "Bounds must be finite numbers with minimum < maximum."
    try:
        ok = math.isfinite(minimum) and math.isfinite(maximum) and minimum < maximum
    except TypeError:
        ok = False
    if not ok:
        raise InvalidArgument("Bad {}range [{}:{}]".format(axis, minimum, maximum))

class Graph:
    "Single owner of the gnuplot pipe; not safe to share between threads."
    def __init__(self, path="gnuplot", stream=None, echo=False, image_terminal="png"):
        """
        Open pipe to gnuplot in persist mode, or write to an already open stream.
        If gnuplot can't be spawned, warn and leave the graph unopened.
        """
        self.__proc__ = None
        self.__pipe__ = None
        self.echo = echo
        self.image_terminal = image_terminal
        if stream is not None:
            self.__pipe__ = stream
            return
        try:
            self.__proc__ = subprocess.Popen(shlex.split(path) + ["-persist"],
                stdin=subprocess.PIPE, universal_newlines=True)
            self.__pipe__ = self.__proc__.stdin
        except (OSError, ValueError) as e:
            warn("Could not open gnuplot with {!r}: {}".format(path, e))

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def is_opened(self):
        return self.__pipe__ is not None

    def close(self):
        "Close the pipe and wait for gnuplot to exit. Safe to call twice."
        if self.__pipe__ is None: return
        pipe, self.__pipe__ = self.__pipe__, None
        if self.__proc__ is not None:
            pipe.close()
            self.__proc__.wait()
            self.__proc__ = None
        else:
            pipe.flush()

    def flush(self):
        if self.__pipe__ is not None:
            self.__pipe__.flush()

    def write(self, text):
        "Write raw text, then flush. No-op on an unopened graph."
        if self.__pipe__ is None: return
        if self.echo:
            print(text, end='', file=sys.stderr, flush=True)
        self.__pipe__.write(text)
        self.flush()

    def command(self, cmd):
        "Send one command line."
        self.write("{}\n".format(cmd))

    # bare keywords

    def reset(self):
        self.command("reset")

    def replot(self):
        self.command("replot")

    def set_autoscale(self):
        self.command("set autoscale")

    # labels
    ## single quotes inside a label are passed through unescaped

    def set_title(self, title):
        self.command("set title '{}'".format(title))

    def set_x_label(self, name):
        self.command("set xlabel '{}'".format(name))

    def set_y_label(self, name):
        self.command("set ylabel '{}'".format(name))

    def set_z_label(self, name):
        self.command("set zlabel '{}'".format(name))

    # ranges

    def set_x_range(self, minimum, maximum):
        check_range('x', minimum, maximum)
        self.command("set xrange [{:f}:{:f}]".format(minimum, maximum))

    def set_y_range(self, minimum, maximum):
        check_range('y', minimum, maximum)
        self.command("set yrange [{:f}:{:f}]".format(minimum, maximum))

    def set_z_range(self, minimum, maximum):
        check_range('z', minimum, maximum)
        self.command("set zrange [{:f}:{:f}]".format(minimum, maximum))

    # appearance

    def set_style(self, style):
        "Set default data style (PlotStyle, name or token)."
        self.command("set style data {}".format(style_name(style)))

    def set_key(self, show=True):
        self.command("set key" if show else "unset key")

    def set_grid(self, show=True):
        self.command("set grid" if show else "unset grid")

    def set_line_color(self, color):
        "Color of the first line, by name or '#rrggbb'."
        self.command("set linetype 1 linecolor rgb '{}'".format(color))

    # plotting

    def plot(self, series):
        "2D plot of x-y pairs."
        self.write("plot '-'\n" + format_2d(series) + "e\n")

    def splot(self, series):
        "Surface plot of x-y-z triples grouped by x."
        self.write("splot '-'\n" + format_surface(series) + "e\n")

    def colormap(self, series):
        "Interpolated pm3d map of x-y-z triples grouped by y."
        self.command("set view map")
        self.command("set pm3d interpolate 0,0")
        self.write("splot '-' with pm3d\n" + format_colormap(series) + "e\n")

    # output

    def export(self, path, width, height):
        "Replot into an image file, then restore the previous terminal."
        target = FileExport(path, width, height)
        self.command("set terminal push")
        self.command("set terminal {} size {},{}".format(self.image_terminal, target.width, target.height))
        self.command("set output '{}'".format(target.path))
        self.replot()
        self.command("unset output")
        self.command("set terminal pop")

    def render(self, target):
        "Show on screen (Display) or write an image (FileExport)."
        if isinstance(target, FileExport):
            self.export(target.path, target.width, target.height)
        elif isinstance(target, Display):
            self.replot()
        else:
            raise InvalidArgument("Unknown render target: {!r}".format(target))
