import logging
import pathlib

from rich.pretty import pprint

from optbind import *

__prog__ = "greeter"


class Greeting:
    name = None
    shout = False
    output = None
    times = 1

    @option("name", "n", required=True, descr="who to greet")
    def set_name(self, name):
        self.name = name

    @flag("shout", "s", descr="greet in uppercase")
    def set_shout(self, shout: bool):
        self.shout = shout

    @option("times", "t", pattern=r"\d+", default="1", descr="how many greetings")
    def set_times(self, times: int):
        self.times = times

    @option("output", "o", descr="write the greeting to a file")
    def set_output(self, output: pathlib.Path | None):
        self.output = output


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    greeting = Binder(Greeting, fancy=True).parse(shell=True)
    pprint(greeting)
