#!/usr/bin/env python3

"""
gnupipe_plot.py

Plot a table of points with gnuplot. The table is a TSV passed via stdin,
with columns x, y and (for surface/colormap) z. Rows are plotted in file
order, so 3D tables must already be grouped: by x for surface, by y for
colormap.

Defaults for the gnuplot command, image terminal and export size can be
kept in an INI file:

[gnuplot]
path = gnuplot
terminal = pngcairo

[export]
width = 1024
height = 768

ex:
cat sweep.tsv | gnupipe_plot.py -k colormap -t "T-P landscape" -o sweep.png

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
import configparser
import pandas as pd
import gnupipe

kinds = {
    "2d"       : ("x", "y"),
    "surface"  : ("x", "y", "z"),
    "colormap" : ("x", "y", "z"),
}

def read_config(path):
    "Read INI file into a flat dict of argparse defaults."
    config = configparser.RawConfigParser()
    defaults = {}
    if path is None:
        return defaults
    if not config.read(path):
        raise FileNotFoundError(path)
    if config.has_section("gnuplot"):
        defaults["gnuplot"] = config["gnuplot"].get("path", "gnuplot")
        defaults["terminal"] = config["gnuplot"].get("terminal", "png")
    if config.has_section("export"):
        defaults["width"] = config["export"].getint("width", 800)
        defaults["height"] = config["export"].getint("height", 600)
    return defaults

def parse_args(argv):
    "Parse command line arguments; INI values replace the built-in defaults."

    # the config file has to be known before the rest of the defaults
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument('-c', "--config")
    known, _ = pre.parse_known_args(argv)

    parser = argparse.ArgumentParser(formatter_class=argparse.RawDescriptionHelpFormatter, description=__doc__)
    parser.add_argument('-c', "--config", help="INI file with [gnuplot] and [export] defaults")
    parser.add_argument('-k', "--kind", help="plot kind", choices=sorted(kinds.keys()), default="2d")
    parser.add_argument('-t', "--title", help="plot title")
    parser.add_argument('-x', "--xlabel", help="x axis label")
    parser.add_argument('-y', "--ylabel", help="y axis label")
    parser.add_argument('-z', "--zlabel", help="z axis label")
    parser.add_argument('-s', "--style", help="data style for 2d plots, e.g. lines, points, linespoints")
    parser.add_argument('-o', "--output", help="export to this image file instead of only showing the plot")
    parser.add_argument('-W', "--width", help="export width (px)", type=int, default=800)
    parser.add_argument('-H', "--height", help="export height (px)", type=int, default=600)
    parser.add_argument('-g', "--gnuplot", help="gnuplot command", default="gnuplot")
    parser.add_argument("--terminal", help="gnuplot image terminal for export", default="png")
    parser.add_argument("--script", help="write gnuplot commands to this file instead of running gnuplot")
    parser.set_defaults(**read_config(known.config))

    return parser.parse_args(argv)

def main(args, stdin, stdout, stderr):
    "Read a point table from stdin and plot it."

    # if args are passed as namespace, convert it to dict
    if isinstance(args, argparse.Namespace):
        args = vars(args)

    if stdin.isatty():
        print("ERR: you need to pass the point table on stdin!", file=stderr, flush=True)
        return 1

    try:
        table = pd.read_csv(stdin, sep='\t')
    except pd.errors.EmptyDataError:
        print("ERR: point table on stdin is empty", file=stderr, flush=True)
        return 1
    cols = kinds[args["kind"]]
    missing = [col for col in cols if col not in table.columns]
    if missing:
        print("ERR: table lacks column(s) {}".format(", ".join(missing)), file=stderr, flush=True)
        return 1
    # anything that won't parse as a number becomes NaN
    coords = table[list(cols)].apply(pd.to_numeric, errors="coerce")
    bad = coords.isna().any(axis=1)
    if bad.any():
        # +2 for the header and 1-based line numbers
        rows = ", ".join(str(i + 2) for i in coords.index[bad][:5])
        print("ERR: non-numeric value(s) on line(s) {}".format(rows), file=stderr, flush=True)
        return 1
    points = list(coords.itertuples(index=False, name=None))
    print("read {} points".format(len(points)), file=stderr, flush=True)

    hand_script = open(args["script"], 'w') if args.get("script") else None
    try:
        graph = gnupipe.Graph(path=args["gnuplot"], stream=hand_script, image_terminal=args["terminal"])
        if not graph.is_opened():
            print("ERR: could not open {}".format(args["gnuplot"]), file=stderr, flush=True)
            return 1
        with graph:
            if args.get("title"): graph.set_title(args["title"])
            if args.get("xlabel"): graph.set_x_label(args["xlabel"])
            if args.get("ylabel"): graph.set_y_label(args["ylabel"])
            if args.get("zlabel"): graph.set_z_label(args["zlabel"])
            if args.get("style"): graph.set_style(args["style"])

            if args["kind"] == "2d":
                graph.plot(points)
            elif args["kind"] == "surface":
                graph.splot(points)
            else:
                graph.colormap(points)

            if args.get("output"):
                graph.render(gnupipe.FileExport(args["output"], args["width"], args["height"]))
                print("wrote {}".format(args["output"]), file=stderr, flush=True)
    except gnupipe.InvalidArgument as e:
        print("ERR: {}".format(e), file=stderr, flush=True)
        return 1
    finally:
        if hand_script is not None:
            hand_script.close()
    return 0

def cli():
    sys.exit(main(parse_args(sys.argv[1:]), sys.stdin, sys.stdout, sys.stderr))

if __name__ == "__main__":
    cli()
