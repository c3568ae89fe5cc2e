#!/usr/bin/env python3

"""
serialgnuplot.py

Damn simple stripcharter, gnuplot edition.
Reads one number per line from a serial device and replots the most
recent window of samples.

ex:
serialgnuplot.py /dev/cu.usbmodem1421 -n 300 -d 0.1

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
import argparse
from collections import deque
from warnings import warn
import serial # pip install pyserial
from serial.serialutil import SerialException
import gnupipe

def read_samples(ser):
    "Yield floats from a '\\n' terminated stream until it times out empty."
    while True:
        line = ser.readline()
        if not line:
            return
        line = line.decode(errors="ignore").strip()
        if not line: continue
        try:
            yield float(line)
        except ValueError:
            warn("Unparseable sample: {!r}".format(line))

class StripChart:
    def __init__(self, graph, window=200, dt=0.1):
        "Keep the last window samples, spaced dt apart on the time axis."
        self.graph = graph
        self.dt = dt
        self.data = deque(maxlen=window)

    def update(self, y):
        "Append a sample and replot the window."
        t = self.data[-1][0] + self.dt if self.data else 0.0
        self.data.append((t, y))
        self.graph.plot(self.data)
        return t

    def reset(self):
        self.data.clear()

def parse_args(argv):
    parser = argparse.ArgumentParser(formatter_class=argparse.RawDescriptionHelpFormatter, description=__doc__)
    parser.add_argument("port", help="serial device or pyserial URL")
    parser.add_argument('-b', "--baud", help="baudrate", type=int, default=9600)
    parser.add_argument('-n', "--window", help="number of samples on screen", type=int, default=200)
    parser.add_argument('-d', "--dt", help="sample spacing (s)", type=float, default=0.1)
    parser.add_argument('-t', "--title", help="chart title", default="serial")
    parser.add_argument('-g', "--gnuplot", help="gnuplot command", default="gnuplot")
    return parser.parse_args(argv)

def main(args, stderr=sys.stderr):
    graph = gnupipe.Graph(path=args.gnuplot)
    if not graph.is_opened():
        print("ERR: could not open {}".format(args.gnuplot), file=stderr, flush=True)
        return 1
    try:
        ser = serial.serial_for_url(args.port, baudrate=args.baud, timeout=1)
    except SerialException as e:
        print("ERR: {}".format(e), file=stderr, flush=True)
        graph.close()
        return 1

    graph.set_title(args.title)
    graph.set_x_label("time (s)")
    graph.set_style(gnupipe.PlotStyle.LINES)
    graph.set_key(False)
    chart = StripChart(graph, window=args.window, dt=args.dt)
    try:
        # read_samples returns on timeout; keep polling
        while True:
            for y in read_samples(ser):
                chart.update(y)
    except KeyboardInterrupt:
        pass
    except SerialException:
        print("{} has been disconnected".format(args.port), file=stderr, flush=True)
    finally:
        ser.close()
        graph.close()
    return 0

def cli():
    sys.exit(main(parse_args(sys.argv[1:])))

if __name__ == "__main__":
    cli()
