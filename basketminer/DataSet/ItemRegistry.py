
class ItemKeyRegistry(object):
    """
    bidirectional item name <-> integer id mapping
    ids start at 1 (0 is reserved) and are never reassigned
    """
    def __init__(self,itemKey=None,keyItem=None):
        self.itemKey=dict(itemKey) if itemKey else {}
        if keyItem:
            self.keyItem=dict(keyItem)
        else:
            self.keyItem={v:k for k,v in self.itemKey.items()}

        if len(self.itemKey)!=len(self.keyItem):
            raise ValueError("inconsistent registry maps ({} names, {} ids)".format(len(self.itemKey),len(self.keyItem)))
        if 0 in self.keyItem:
            raise ValueError("item id 0 is reserved")

        self.maxId=max(self.keyItem.keys()) if self.keyItem else 0

    def lookupOrCreate(self,name):
        if name in self.itemKey:
            return self.itemKey[name]

        self.maxId+=1
        self.itemKey[name]=self.maxId
        self.keyItem[self.maxId]=name
        return self.maxId

    def lookup(self,name):
        return self.itemKey[name]

    def idToName(self,id):
        return self.keyItem[id]

    def translate(self,ids):
        return [self.keyItem[i] for i in ids]

    def __len__(self):
        return len(self.itemKey)

    def __contains__(self,name):
        return name in self.itemKey

    def items(self):
        return sorted(self.keyItem.items())
