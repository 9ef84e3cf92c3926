"""Main entry point for sample project."""

from shop.processor import OrderProcessor, UserProcessor


def main():
    """Main function demonstrating the application."""
    user_proc = UserProcessor()
    order_proc = OrderProcessor(user_proc)

    user = user_proc.create_user("alice@example.com", "alice", "smith")
    if user:
        order = order_proc.create_order(user.id, [19.99, 29.99, 9.99])
        if order:
            total = order_proc.calculate_order_total(order.id)
            print(f"Order {order.id} total: ${total:.2f}")
        print(user.full_name().upper())

    print("Application completed")


if __name__ == "__main__":
    main()
