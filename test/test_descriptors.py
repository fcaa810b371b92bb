"""
Option descriptor behavioral tests.

Scope
- OptionDescriptor: construction, normalization, immutability, metadata checks.
- option/flag decorators: single application and the __option__ hook.
- discover(): declaration order, base classes first, overrides keep their slot.
- catalog(): alias table and collision detection.
- resolve_type(): explicit type, setter annotations, attribute annotations.

Conventions
- Test method names follow CamelCase per project convention.
"""
import ctypes
import pathlib
import re
import unittest
from unittest import TestCase

from optbind import OptionDescriptor, option, flag, discover, catalog, resolve_type, Unset


class TestOptionDescriptor(TestCase):
    """Construction and metadata of OptionDescriptor."""

    def testDefaults(self):
        descriptor = OptionDescriptor("port", target="port")
        self.assertEqual(descriptor.name, "port")
        self.assertEqual(descriptor.aliases, ())
        self.assertFalse(descriptor.flag)
        self.assertFalse(descriptor.required)
        self.assertEqual(descriptor.pattern.pattern, ".*")
        self.assertIsNone(descriptor.default)
        self.assertIsNone(descriptor.descr)
        self.assertEqual(descriptor.target, "port")
        self.assertIs(descriptor.type, Unset)

    def testNames(self):
        descriptor = OptionDescriptor("aliases", "als", "ali", target="aliases")
        self.assertEqual(descriptor.aliases, ("als", "ali"))
        self.assertEqual(descriptor.names, ("aliases", "als", "ali"))

    def testPatternCompiled(self):
        descriptor = OptionDescriptor("number", pattern="[0-9]*", target="number")
        self.assertIsInstance(descriptor.pattern, re.Pattern)
        self.assertTrue(descriptor.matches("123"))
        self.assertTrue(descriptor.matches(""))
        self.assertFalse(descriptor.matches("NaN"))
        self.assertFalse(descriptor.matches("12a"))

    def testCompiledPatternAccepted(self):
        pattern = re.compile(r"\d+")
        self.assertIs(OptionDescriptor("n", pattern=pattern, target="n").pattern, pattern)

    def testEmptyDefaultMeansNoDefault(self):
        self.assertIsNone(OptionDescriptor("a", default="", target="a").default)
        self.assertIsNone(OptionDescriptor("a", default=None, target="a").default)
        self.assertEqual(OptionDescriptor("a", default="test", target="a").default, "test")

    def testDescrStripped(self):
        self.assertEqual(OptionDescriptor("a", descr="  Basic property ", target="a").descr, "Basic property")

    def testImmutable(self):
        descriptor = OptionDescriptor("port", target="port")
        with self.assertRaises(AttributeError):
            descriptor.name = "other"
        with self.assertRaises(AttributeError):
            setattr(descriptor, "-name", "other")

    def testRepr(self):
        descriptor = OptionDescriptor("port", "p", target="port")
        self.assertTrue(repr(descriptor).startswith("option-descriptor(name='port', aliases=('p',)"))

    def testOptionHookReturnsSelf(self):
        descriptor = OptionDescriptor("port", target="port")
        self.assertIs(descriptor.__option__(), descriptor)

    def testAssignAttribute(self):
        class Target:
            pass

        instance = Target()
        OptionDescriptor("port", target="port").assign(instance, 80)
        self.assertEqual(instance.port, 80)

    def testAssignCallable(self):
        received = []
        OptionDescriptor("port", target=lambda instance, value: received.append((instance, value))).assign("i", 80)
        self.assertEqual(received, [("i", 80)])


class TestOptionDescriptorMetadata(TestCase):
    """Configuration mistakes raise TypeError/ValueError at construction."""

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            OptionDescriptor(1, target="a")

    def testNameCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            OptionDescriptor("", target="a")

    def testNameMustBeUnprefixed(self):
        for name in ("-a", "a=b", "a b"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    OptionDescriptor(name, target="a")

    def testAliasChecks(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a", 1, target="a")
        with self.assertRaises(ValueError):
            OptionDescriptor("a", "", target="a")
        with self.assertRaises(ValueError):
            OptionDescriptor("a", "-b", target="a")
        with self.assertRaises(ValueError):
            OptionDescriptor("a", "a", target="a")
        with self.assertRaises(ValueError):
            OptionDescriptor("a", "b", "b", target="a")

    def testBooleanSwitches(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a", flag=1, target="a")
        with self.assertRaises(TypeError):
            OptionDescriptor("a", required="yes", target="a")

    def testInvalidPattern(self):
        with self.assertRaises(ValueError):
            OptionDescriptor("a", pattern="[", target="a")
        with self.assertRaises(TypeError):
            OptionDescriptor("a", pattern=1, target="a")

    def testBytesPatternRejected(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a", pattern=re.compile(rb"\d+"), target="a")

    def testDefaultMustBeString(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a", default=1, target="a")

    def testDescrChecks(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a", descr=1, target="a")
        with self.assertRaises(ValueError):
            OptionDescriptor("a", descr="   ", target="a")

    def testTypeChecks(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a", type="int", target="a")
        with self.assertRaises(TypeError):
            OptionDescriptor("a", flag=True, type=bool, target="a")

    def testTargetChecks(self):
        with self.assertRaises(TypeError):
            OptionDescriptor("a")
        with self.assertRaises(ValueError):
            OptionDescriptor("a", target="not an identifier")
        with self.assertRaises(TypeError):
            OptionDescriptor("a", target=1)
        with self.assertRaises(TypeError):
            OptionDescriptor("a", target=lambda value: None)


class Settings:
    port = 0
    verbose = False

    @option("port", "p", pattern=r"\d+", default="8080", descr="listening port")
    def set_port(self, port: int):
        self.port = port

    @flag("verbose", "v", descr="chatty output")
    def set_verbose(self, verbose: bool):
        self.verbose = verbose

    def helper(self):
        pass


class TestDecorators(TestCase):
    """@option and @flag."""

    def testOptionHook(self):
        descriptor = Settings.set_port.__option__()
        self.assertIsInstance(descriptor, OptionDescriptor)
        self.assertEqual(descriptor.name, "port")
        self.assertEqual(descriptor.aliases, ("p",))
        self.assertEqual(descriptor.default, "8080")
        self.assertIs(descriptor.target, Settings.set_port)

    def testFlagHook(self):
        descriptor = Settings.set_verbose.__option__()
        self.assertTrue(descriptor.flag)
        self.assertEqual(descriptor.descr, "chatty output")

    def testDecoratedFunctionStillCallable(self):
        settings = Settings()
        settings.set_port(9)
        self.assertEqual(settings.port, 9)

    def testSingleApplication(self):
        with self.assertRaises(TypeError):
            @option("b")
            @option("a")
            def setter(self, value):
                pass

    def testTargetNotAllowed(self):
        with self.assertRaises(TypeError):
            option("a", target="a")

    def testMustDecorateCallable(self):
        with self.assertRaises(TypeError):
            option("a")(1)

    def testMetadataCheckedAtDecoration(self):
        with self.assertRaises(ValueError):
            @option("a", pattern="[")
            def setter(self, value):
                pass


class TestDiscover(TestCase):
    """discover() over a class hierarchy."""

    def testDeclarationOrder(self):
        self.assertEqual([descriptor.name for descriptor in discover(Settings)], ["port", "verbose"])

    def testBaseClassesFirst(self):
        class Extended(Settings):
            @option("host")
            def set_host(self, host):
                self.host = host

        self.assertEqual([descriptor.name for descriptor in discover(Extended)], ["port", "verbose", "host"])

    def testOverrideKeepsSlot(self):
        class Overridden(Settings):
            @option("extra")
            def set_extra(self, extra):
                pass

            @option("port", "P")
            def set_port(self, port: int):
                self.port = port

        descriptors = discover(Overridden)
        self.assertEqual([descriptor.name for descriptor in descriptors], ["port", "verbose", "extra"])
        self.assertEqual(descriptors[0].aliases, ("P",))

    def testClassLevelDescriptors(self):
        class Declared:
            port = OptionDescriptor("port", target="port_value")

        self.assertEqual([descriptor.name for descriptor in discover(Declared)], ["port"])

    def testNoOptions(self):
        self.assertEqual(discover(object), [])
        self.assertEqual(discover(lambda: None), [])

    def testBadHook(self):
        class Broken:
            def member(self):
                pass
            member.__option__ = lambda: "not a descriptor"

        with self.assertRaises(TypeError):
            discover(Broken)


class TestCatalog(TestCase):
    """catalog() alias table and collisions."""

    def testAliasTable(self):
        descriptors, aliases = catalog([
            OptionDescriptor("aliased", "a", target="aliased"),
            OptionDescriptor("aliases", "als", "ali", target="aliases"),
        ])
        self.assertEqual(len(descriptors), 2)
        self.assertEqual(aliases, {"a": "aliased", "als": "aliases", "ali": "aliases"})
        self.assertEqual(list(aliases), ["a", "als", "ali"])

    def testDuplicateName(self):
        with self.assertRaises(TypeError):
            catalog([OptionDescriptor("a", target="a"), OptionDescriptor("a", target="b")])

    def testAliasCollidesWithName(self):
        with self.assertRaises(TypeError):
            catalog([OptionDescriptor("a", "x", target="a"), OptionDescriptor("x", target="x")])

    def testAliasCollidesWithAlias(self):
        with self.assertRaises(TypeError):
            catalog([OptionDescriptor("a", "x", target="a"), OptionDescriptor("b", "x", target="b")])

    def testNonDescriptor(self):
        with self.assertRaises(TypeError):
            catalog(["a"])


class Annotated:
    count: int
    ratio: float | None
    path: pathlib.Path
    label = "plain"

    def set_count(self, value: int):
        self.count = value

    def set_optional(self, value: pathlib.Path | None):
        self.path = value

    def set_plain(self, value):
        self.label = value


class TestResolveType(TestCase):
    """resolve_type() inference order."""

    def testExplicitType(self):
        descriptor = OptionDescriptor("count", type=ctypes.c_short, target=Annotated.set_count)
        self.assertIs(resolve_type(descriptor, Annotated), ctypes.c_short)

    def testSetterAnnotation(self):
        self.assertIs(resolve_type(OptionDescriptor("count", target=Annotated.set_count), Annotated), int)

    def testOptionalSetterAnnotation(self):
        descriptor = OptionDescriptor("path", target=Annotated.set_optional)
        self.assertIs(resolve_type(descriptor, Annotated), pathlib.Path)

    def testAttributeAnnotation(self):
        self.assertIs(resolve_type(OptionDescriptor("count", target="count"), Annotated), int)
        self.assertIs(resolve_type(OptionDescriptor("ratio", target="ratio"), Annotated), float)

    def testFallsBackToString(self):
        self.assertIs(resolve_type(OptionDescriptor("plain", target=Annotated.set_plain), Annotated), str)
        self.assertIs(resolve_type(OptionDescriptor("label", target="label"), Annotated), str)
        self.assertIs(resolve_type(OptionDescriptor("x", target="x"), lambda: Annotated()), str)

    def testFlagsAreBoolean(self):
        self.assertIs(resolve_type(OptionDescriptor("v", flag=True, target="v"), Annotated), bool)


if __name__ == "__main__":
    unittest.main()
