"""Example: browse an in-process registry through the remote adapter."""

from jmxbridge import Attribute, LocalRegistry, ManagedObject, RemoteRegistryAdapter
from jmxbridge.query import ClassNameMatches
from jmxbridge.registry import AttributeSpec, OperationSpec
from jmxbridge.transports import InMemoryTransport


def build_registry() -> LocalRegistry:
    registry = LocalRegistry()
    registry.register_mbean(
        "shop:type=Cache,name=orders",
        ManagedObject(
            class_name="com.shop.Cache",
            attributes={
                "Size": AttributeSpec(value=128, type="int"),
                "HitRatio": AttributeSpec(value=0.93, type="double", writable=False),
            },
            operations={"clear": OperationSpec(handler=lambda: "cleared", parameters=[])},
        ),
    )
    registry.register_mbean(
        "shop:type=Queue,name=payments",
        ManagedObject(
            class_name="com.shop.Queue",
            attributes={"Depth": AttributeSpec(value=4, type="int")},
        ),
    )
    return registry


def main():
    # Swap InMemoryTransport for HttpTransport("http://host:8778/jolokia")
    # to talk to a real agent.
    adapter = RemoteRegistryAdapter(InMemoryTransport(build_registry()))

    print(f"📂 Domains: {adapter.get_domains()}")
    for name in sorted(adapter.query_names("shop:*"), key=str):
        print(f"🔎 Found {name}")

    caches = adapter.query_names(query=ClassNameMatches("*.Cache"))
    print(f"🗄️  Caches: {[str(n) for n in caches]}")

    cache = "shop:type=Cache,name=orders"
    print(f"📏 Size before: {adapter.get_attribute(cache, 'Size')}")
    adapter.set_attributes(cache, [Attribute(name="Size", value=256)])
    print(f"📏 Size after: {adapter.get_attribute(cache, 'Size')}")
    print(f"🧹 clear() -> {adapter.invoke(cache, 'clear')}")


if __name__ == "__main__":
    main()
