import argparse
import json
import os
import sys

from luacore import BundleError, bundle, build, load_config
from luacore.log import log, set_verbose

CONFIG_FILE = "luapack.json"


def load(args):
    try:
        return load_config(args.config)
    except (BundleError, OSError) as e:
        print(f"Error: Could not load configuration:\n{e}", file=sys.stderr)
        sys.exit(1)


def cmd_bundle(args):
    set_verbose(args.verbose)
    config = load(args)

    if not os.path.exists(args.entry):
        print(f"Error: File '{args.entry}' not found.", file=sys.stderr)
        sys.exit(1)

    log(f"Bundling Lua for {args.entry}...")
    try:
        bundled = bundle(args.entry, config)
    except BundleError as e:
        print(f"Error: Bundling Failed:\n{e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        output_dir = os.path.dirname(args.output)
        if output_dir and not os.path.exists(output_dir):
            os.makedirs(output_dir)
        with open(args.output, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
            f.write(bundled)
        log(f"Done Bundling Lua for {args.entry}! Written to {args.output}")
    else:
        # Sources are read with surrogateescape; write their bytes back unchanged
        sys.stdout.flush()
        sys.stdout.buffer.write(bundled.encode('utf-8', 'surrogateescape'))
        sys.stdout.buffer.flush()


def cmd_graph(args):
    """Print the dependency graph of an entry module without bundling it."""
    set_verbose(args.verbose)
    config = load(args)

    try:
        graph = build(args.entry, config)
    except BundleError as e:
        print(f"Error: Graph Failed:\n{e}", file=sys.stderr)
        sys.exit(1)

    modules = []
    for module_id, record in graph.modules.items():
        modules.append({
            "id": module_id,
            "path": record.path,
            "requires": [graph.id_for_path(target) for target in record.dependencies],
        })

    if args.json:
        print(json.dumps({"entry": graph.entry_id, "modules": modules}, indent=2))
        return

    width = max(len(m["id"]) for m in modules)
    print(f"📦 ENTRY: {graph.entry_id}\n")
    for m in modules:
        requires = ", ".join(m["requires"]) or "-"
        print(f"   {m['id'].ljust(width)}  ->  {requires}")
    print(f"\n{len(modules)} module(s), {sum(len(m['requires']) for m in modules)} edge(s)")


def cmd_init(args):
    log("Initializing project...")
    with open("main.lua", "w") as f:
        f.write('local util = require("./util")\n\nprint(util.greet("Lua"))\n')
    with open("util.lua", "w") as f:
        f.write('local M = {}\n\nfunction M.greet(name)\n  return "Hello " .. name\nend\n\nreturn M\n')
    with open(CONFIG_FILE, "w") as f:
        json.dump({"search_templates": ["?", "?.lua", "?/init.lua"], "externals": []}, f, indent=2)
    log(f"Created main.lua, util.lua and {CONFIG_FILE}")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="luapack", description="Bundle Lua modules into a single file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help=f"Configuration file (default: ./{CONFIG_FILE} or ~/.luapack/config.json)")
    subparsers = parser.add_subparsers(dest="command")

    bundle_parser = subparsers.add_parser("bundle", help="Bundle an entry module")
    bundle_parser.add_argument("entry", help="Entry .lua file")
    bundle_parser.add_argument("-o", "--output", help="Output file (default: stdout)")

    graph_parser = subparsers.add_parser("graph", help="Show the dependency graph of an entry module")
    graph_parser.add_argument("entry", help="Entry .lua file")
    graph_parser.add_argument("--json", action="store_true", help="Print the graph as JSON")

    subparsers.add_parser("init", help="Init project")

    args = parser.parse_args(argv)

    if args.command == "bundle": cmd_bundle(args)
    elif args.command == "graph": cmd_graph(args)
    elif args.command == "init": cmd_init(args)
    else: parser.print_help()


if __name__ == "__main__":
    main()
