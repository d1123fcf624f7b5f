"""Core data structures for the reservation ledger"""
from collections import deque


class Node:
    """Node for Linked List"""
    def __init__(self, data):
        self.data = data
        self.next = None


class LinkedList:
    """Singly linked list holding trains or confirmed passengers in insertion order"""
    def __init__(self):
        self.head = None
        self.tail = None
        self._size = 0

    def insert_at_end(self, data):
        """Append a node in O(1) using the tail pointer"""
        new_node = Node(data)
        if self.tail is None:
            self.head = self.tail = new_node
        else:
            self.tail.next = new_node
            self.tail = new_node
        self._size += 1

    def search(self, key, compare_func):
        """Return the first element for which compare_func(element, key) holds"""
        current = self.head
        while current:
            if compare_func(current.data, key):
                return current.data
            current = current.next
        return None

    def delete_by_value(self, key, compare_func):
        """Unlink the first matching node and return its data, or None"""
        previous = None
        current = self.head
        while current:
            if compare_func(current.data, key):
                if previous is None:
                    self.head = current.next
                else:
                    previous.next = current.next
                if current is self.tail:
                    self.tail = previous
                self._size -= 1
                return current.data
            previous = current
            current = current.next
        return None

    def filter(self, predicate):
        """Elements matching predicate, in list order"""
        return [data for data in self if predicate(data)]

    def get_all(self):
        """Get all elements as list"""
        return list(self)

    def __iter__(self):
        current = self.head
        while current:
            yield current.data
            current = current.next

    def __len__(self):
        return self._size


class Queue:
    """FIFO queue for the waiting list"""
    def __init__(self, items=None):
        self.items = deque(items or [])

    def enqueue(self, item):
        """Add item at the tail"""
        self.items.append(item)

    def dequeue(self):
        """Remove and return the head item, None when empty"""
        if not self.is_empty():
            return self.items.popleft()
        return None

    def is_empty(self):
        return len(self.items) == 0

    def size(self):
        return len(self.items)

    def get_all(self):
        """Snapshot of the queue, head first"""
        return list(self.items)

    def __iter__(self):
        return iter(list(self.items))

    def __len__(self):
        return len(self.items)
